from .encoder import ALPHABET, decode, encode
from .shortening_engine import ShorteningEngine

__all__ = ["ALPHABET", "encode", "decode", "ShorteningEngine"]
