"""Sticker pack preparation: normalize images, encrypt and upload packs."""

__version__ = "0.1.0"
