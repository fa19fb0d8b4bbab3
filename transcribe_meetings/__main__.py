"""Package entry point for ``python -m transcribe_meetings``."""

from transcribe_meetings.cli import main

if __name__ == "__main__":
    main()
