from datetime import date


def month_key(d: date) -> str:
    """
    Example:
      2024-03-15 → "2024-03"
    """
    return d.strftime("%Y-%m")
