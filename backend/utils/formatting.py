from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")

_UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
          "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def to_money(value) -> Decimal:
    """Round any numeric input to paise."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_indian_currency(amount) -> str:
    """₹ 12,34,567.89 style grouping (last three digits, then pairs)."""
    amount = to_money(amount)
    sign = "-" if amount < 0 else ""
    integer_part, decimal_part = f"{abs(amount):.2f}".split(".")

    if len(integer_part) > 3:
        head, last_three = integer_part[:-3], integer_part[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        integer_part = ",".join(groups + [last_three])

    return f"₹ {sign}{integer_part}.{decimal_part}"


def _convert(num: int) -> str:
    if num < 20:
        return _UNITS[num]
    if num < 100:
        return _TENS[num // 10] + (" " + _UNITS[num % 10] if num % 10 else "")
    if num < 1000:
        return _UNITS[num // 100] + " Hundred" + (" " + _convert(num % 100) if num % 100 else "")
    if num < 100000:
        return _convert(num // 1000) + " Thousand" + (" " + _convert(num % 1000) if num % 1000 else "")
    if num < 10000000:
        return _convert(num // 100000) + " Lakh" + (" " + _convert(num % 100000) if num % 100000 else "")
    return _convert(num // 10000000) + " Crore" + (" " + _convert(num % 10000000) if num % 10000000 else "")


def amount_to_words(amount) -> str:
    """Spell an amount using the Indian numbering system (Lakh, Crore) with paise."""
    if amount is None:
        return ""
    amount = to_money(amount)
    if amount < 0:
        return "Minus " + amount_to_words(-amount)
    if amount == 0:
        return "Zero"

    rupees = int(amount)
    paise = int((amount - rupees) * 100)

    result = _convert(rupees) if rupees else "Zero"
    if paise:
        result += " and " + _convert(paise) + " Paise"
    return result


def rupees_in_words(amount) -> str:
    """Receipt wording, e.g. "Rupees Five Hundred One Only"."""
    return f"Rupees {amount_to_words(amount)} Only"


def gst_amounts(subtotal, gst_rate):
    """(gst_amount, total) for a subtotal at a percentage rate, both rounded to paise."""
    subtotal = to_money(subtotal)
    gst_amount = to_money(subtotal * Decimal(str(gst_rate or 0)) / 100)
    return gst_amount, subtotal + gst_amount
