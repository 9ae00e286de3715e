from email_validator import EmailNotValidError, validate_email


def check_email(value: str) -> str:
    """
    Reject malformed addresses without rewriting the accepted ones.

    Emails are matched exactly at login, so the normalized form from
    email-validator is not stored.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e))
    return value


def parse_flag(value: str | None) -> bool:
    """Form checkbox/radio values: yes/true/1/on mean set, anything else does not"""
    if value is None:
        return False
    return value.strip().lower() in {"yes", "true", "1", "on"}
