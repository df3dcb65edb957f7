"""
localization/pt_br.py
---------------------
Brazilian Portuguese texts.
"""

CODE = "pt-BR"

MONTHS = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

MONTHS_SHORT = [
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
]

# ── Statement closing reminder ────────────────────────────
STATEMENT_GREETING = "Olá! 👋"
STATEMENT_CLOSING_IN = "Sua fatura do *{payment_method}* fecha em {days} dias ({date})."
STATEMENT_PERIOD = "📅 Período atual: {start} - {end}"
STATEMENT_TOTAL = "💳 Total até agora: {amount}"
STATEMENT_BUDGET = "📊 Orçamento: {budget} ({percentage}% usado)"
STATEMENT_REMAINING = "Restam {amount} para o seu orçamento mensal."
STATEMENT_EXCEEDED = "Você está {amount} acima do planejado para este mês."
STATEMENT_CTA = 'Para ver os detalhes, digite "resumo da fatura" ou acesse o app.'

# ── Credit card payment reminder ──────────────────────────
PAYMENT_TITLE = "💳 Lembrete: Pagamento do cartão"
PAYMENT_DUE_IN = "Vence em {days} dias ({date})"
PAYMENT_AMOUNT = "💰 Valor: {amount}"
PAYMENT_CARD = "Cartão {name}"
PAYMENT_PERIOD = "Período: {start} - {end}"
PAYMENT_FOOTER = "Não esqueça de realizar o pagamento! 😊"
