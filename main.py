"""Main entry point for the sticker pack tool."""

from stickerpack.cli import main


if __name__ == "__main__":
    main()
