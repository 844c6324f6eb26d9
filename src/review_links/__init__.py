from .tokenizer import TOKEN_TTL_MS, ReviewLinkTokenizer

__all__ = ["TOKEN_TTL_MS", "ReviewLinkTokenizer"]
