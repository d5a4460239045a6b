"""Package entry point for ``python -m video_captioner``."""

from video_captioner.cli import main

if __name__ == "__main__":
    main()
