"""Command-line interface."""
from stepscene.main import main

if __name__ == "__main__":
    main()
