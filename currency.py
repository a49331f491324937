from typing import NamedTuple, Optional


class Currency(NamedTuple):
    code: str
    symbol: str
    name: str


CURRENCIES = (
    Currency("USD", "$", "US Dollar"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("JPY", "¥", "Japanese Yen"),
    Currency("CNY", "¥", "Chinese Yuan"),
    Currency("INR", "₹", "Indian Rupee"),
    Currency("AUD", "A$", "Australian Dollar"),
    Currency("CAD", "C$", "Canadian Dollar"),
    Currency("CHF", "Fr", "Swiss Franc"),
    Currency("SEK", "kr", "Swedish Krona"),
    Currency("NZD", "NZ$", "New Zealand Dollar"),
    Currency("KRW", "₩", "South Korean Won"),
    Currency("SGD", "S$", "Singapore Dollar"),
    Currency("NOK", "kr", "Norwegian Krone"),
    Currency("MXN", "$", "Mexican Peso"),
    Currency("ZAR", "R", "South African Rand"),
    Currency("BRL", "R$", "Brazilian Real"),
    Currency("RUB", "₽", "Russian Ruble"),
    Currency("HKD", "HK$", "Hong Kong Dollar"),
    Currency("TRY", "₺", "Turkish Lira"),
    Currency("IDR", "Rp", "Indonesian Rupiah"),
    Currency("PLN", "zł", "Polish Zloty"),
    Currency("THB", "฿", "Thai Baht"),
    Currency("MYR", "RM", "Malaysian Ringgit"),
    Currency("DKK", "kr", "Danish Krone"),
    Currency("PHP", "₱", "Philippine Peso"),
    Currency("CZK", "Kč", "Czech Koruna"),
    Currency("ILS", "₪", "Israeli Shekel"),
    Currency("AED", "د.إ", "UAE Dirham"),
    Currency("SAR", "﷼", "Saudi Riyal"),
    Currency("HUF", "Ft", "Hungarian Forint"),
    Currency("CLP", "$", "Chilean Peso"),
    Currency("ARS", "$", "Argentine Peso"),
    Currency("COP", "$", "Colombian Peso"),
    Currency("PEN", "S/", "Peruvian Sol"),
    Currency("EGP", "£", "Egyptian Pound"),
    Currency("VND", "₫", "Vietnamese Dong"),
    Currency("RON", "lei", "Romanian Leu"),
    Currency("BGN", "лв", "Bulgarian Lev"),
    Currency("HRK", "kn", "Croatian Kuna"),
)

_BY_CODE = {c.code: c for c in CURRENCIES}
DEFAULT_CURRENCY = "USD"


def get_currency(code: Optional[str]) -> Currency:
    return _BY_CODE.get((code or "").upper(), _BY_CODE[DEFAULT_CURRENCY])


def get_currency_symbol(code: Optional[str]) -> str:
    return get_currency(code).symbol


def get_currency_name(code: Optional[str]) -> str:
    return get_currency(code).name


def format_currency(amount: float, code: Optional[str] = DEFAULT_CURRENCY) -> str:
    return f"{get_currency_symbol(code)}{amount:.2f}"


def format_currency_short(amount: float, code: Optional[str] = DEFAULT_CURRENCY) -> str:
    return f"{get_currency_symbol(code)}{amount:.0f}"
