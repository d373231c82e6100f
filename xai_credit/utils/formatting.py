"""Number formatting utilities for prompt text"""


def format_plain(value: float) -> str:
    """Render a number without a trailing ``.0`` for whole values"""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def format_inr(amount: float) -> str:
    """
    Group digits the Indian way (lakh/crore): 4500000 -> 45,00,000.

    Fractions keep at most three decimals.
    """
    sign = "-" if amount < 0 else ""
    text = format_plain(abs(amount))
    whole, _, fraction = text.partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"
