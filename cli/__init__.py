"""
``python -m cli`` runs the singleton-registry command line
(``strategies``, ``stress`` and ``bench``).
"""

from .commands import app


def main() -> None:
    """Console-script entry point for ``singleton-registry``."""
    app()


if __name__ == "__main__":
    main()
