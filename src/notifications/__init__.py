from .mailer import ResendMailer, build_review_url

__all__ = ["ResendMailer", "build_review_url"]
