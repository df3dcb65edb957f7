"""
nlp/text_utils.py
-----------------
Shared extraction helpers for the deterministic parsers: amounts, dates,
payment methods and category guesses in Portuguese and English.
"""

import re
import unicodedata
from datetime import date, timedelta
from typing import Optional

# Amounts like "50", "R$ 50,90", "1.234,56", "12.5"
_AMOUNT_RE = re.compile(
    r"(?:r\$\s*)?(?<![\w/])(\d{1,3}(?:\.\d{3})+(?:,\d{1,2})?|\d+(?:[.,]\d{1,2})?)(?![\w/])",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b")

PAYMENT_METHOD_KEYWORDS = (
    "dinheiro", "cartao", "pix", "debito", "credito",
    "nubank", "inter", "itau", "bradesco", "santander", "caixa", "bb",
)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Alimentação": ("restaurante", "almoco", "jantar", "lanche", "ifood", "comida", "cafe", "pizza", "padaria"),
    "Mercado": ("mercado", "supermercado", "feira", "hortifruti"),
    "Transporte": ("uber", "taxi", "gasolina", "combustivel", "onibus", "metro", "estacionamento"),
    "Moradia": ("aluguel", "condominio", "iptu"),
    "Contas": ("luz", "agua", "internet", "telefone", "energia", "gas"),
    "Saúde": ("farmacia", "remedio", "medico", "consulta", "dentista", "academia"),
    "Educação": ("curso", "livro", "faculdade", "escola", "mensalidade"),
    "Lazer": ("cinema", "show", "bar", "viagem", "jogo", "balada"),
    "Compras": ("roupa", "sapato", "amazon", "shopping", "presente", "celular"),
    "Assinaturas": ("netflix", "spotify", "assinatura", "prime", "disney"),
    "Salário": ("salario", "salary", "pagamento do trabalho"),
    "Renda Extra": ("freela", "freelance", "bico", "venda"),
}

MONTHS_PT = (
    "janeiro", "fevereiro", "marco", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


def normalize(text: str) -> str:
    """Lowercase and strip accents: 'Salário' → 'salario'."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def contains_word(text: str, words: tuple[str, ...]) -> bool:
    """Whole-word (or phrase) match on normalized text."""
    normalized = normalize(text)
    return any(re.search(rf"\b{re.escape(w)}\b", normalized) for w in words)


def parse_amount(raw: str) -> Optional[float]:
    """
    Parse a single amount token.

    Accepts "50", "50,90", "R$ 1.234,56", "12.5". Returns None for
    anything that is not a positive number.
    """
    cleaned = raw.strip().lower().replace("r$", "").replace(" ", "")
    if not cleaned:
        return None
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif re.fullmatch(r"\d{1,3}(?:\.\d{3})+", cleaned):
        cleaned = cleaned.replace(".", "")
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if value > 0 else None


def extract_amount(text: str) -> Optional[float]:
    """First amount found in free text, ignoring dates and installment counts like '12x'."""
    without_dates = _DATE_RE.sub(" ", text)
    without_counts = re.sub(r"\b\d+\s*(?:x|vezes|parcelas)\b", " ", without_dates, flags=re.IGNORECASE)
    without_days = re.sub(r"\bdia\s+\d{1,2}\b", " ", without_counts, flags=re.IGNORECASE)
    match = _AMOUNT_RE.search(without_days)
    return parse_amount(match.group(1)) if match else None


def extract_date(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Dates from 'hoje', 'ontem', 'anteontem' (and English equivalents) or DD/MM[/YYYY].
    Returns None when the text mentions no date.
    """
    today = today or date.today()
    normalized = normalize(text)
    if re.search(r"\banteontem\b", normalized):
        return today - timedelta(days=2)
    if re.search(r"\b(ontem|yesterday)\b", normalized):
        return today - timedelta(days=1)
    if re.search(r"\b(hoje|today)\b", normalized):
        return today
    return parse_date_token(text, today)


def parse_date_token(text: str, today: Optional[date] = None) -> Optional[date]:
    """DD/MM or DD/MM/YYYY; a two-digit year means 20YY. Invalid dates yield None."""
    today = today or date.today()
    match = _DATE_RE.search(text)
    if not match:
        return None
    day, month, year = match.groups()
    year_value = today.year
    if year:
        year_value = int(year) + 2000 if len(year) == 2 else int(year)
    try:
        return date(year_value, int(month), int(day))
    except ValueError:
        return None


def extract_payment_method(text: str) -> Optional[str]:
    normalized = normalize(text)
    for keyword in PAYMENT_METHOD_KEYWORDS:
        if re.search(rf"\b{keyword}\b", normalized):
            return keyword
    return None


def guess_category(text: str) -> Optional[str]:
    """Default category name suggested by keywords in the text."""
    normalized = normalize(text)
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(re.search(rf"\b{re.escape(k)}\b", normalized) for k in keywords):
            return category
    return None


def extract_month(text: str) -> Optional[int]:
    """Month number from a Portuguese month name, if any."""
    normalized = normalize(text)
    for index, name in enumerate(MONTHS_PT, start=1):
        if re.search(rf"\b{name}\b", normalized):
            return index
    return None


def strip_keywords(text: str, keywords: tuple[str, ...]) -> str:
    """Remove amounts, dates and the given keywords, leaving a description."""
    result = _DATE_RE.sub(" ", text)
    result = re.sub(r"r\$\s*", " ", result, flags=re.IGNORECASE)
    result = re.sub(r"\b\d+(?:[.,]\d+)*\b", " ", result)
    for keyword in keywords:
        result = re.sub(rf"\b{re.escape(keyword)}\b", " ", result, flags=re.IGNORECASE)
    result = re.sub(r"\b(de|no|na|com|em|reais|real|o|a)\b", " ", result, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", result).strip(" ,.-")
