"""
Entry point for running the CLI as a module: `python -m cli`

Examples:
  python -m cli strategies
  python -m cli stress --threads 200 --strategy synchronized
  python -m cli bench --threads 16
"""

from cli import main

if __name__ == "__main__":
    main()
