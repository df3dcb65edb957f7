"""
ai/gemini_parser.py
-------------------
Uses Google Gemini to interpret chat messages the deterministic parsers
could not, and to embed messages for the semantic cache.

Responsibilities:
    - Understand Portuguese (and English) financial messages.
    - Let the model pick one of the declared functions; each function
      groups related actions and takes the action name as an argument.
    - Never raise: API failures, timeouts and messages the model does not
      map to a function yield None.
"""

from datetime import date
from typing import Any, Optional

import google.generativeai as genai

from config import AI_TIMEOUT_SECONDS, GEMINI_API_KEY, GEMINI_EMBEDDING_MODEL, GEMINI_MODEL
from models.intent import Intent
from utils.logger import get_logger

logger = get_logger(__name__)

# Configure the Gemini client once at module level
genai.configure(api_key=GEMINI_API_KEY)

FUNCTION_CALL_CONFIDENCE = 0.95

_T = genai.protos.Type

# Entities that arrive as JSON numbers but are used as integers
_INTEGER_ENTITIES = (
    "transaction_id", "payment_id", "plan_id", "installments", "day_of_month",
    "month", "year", "closing_day", "due_day", "limit",
)

# ── Function declarations ────────────────────────────────

_TRANSACTION_ITEM = genai.protos.Schema(
    type=_T.OBJECT,
    properties={
        "type": genai.protos.Schema(type=_T.STRING, format_="enum", enum=["expense", "income"]),
        "amount": genai.protos.Schema(type=_T.NUMBER),
        "category": genai.protos.Schema(type=_T.STRING),
        "description": genai.protos.Schema(type=_T.STRING),
        "date": genai.protos.Schema(type=_T.STRING, description="YYYY-MM-DD"),
        "payment_method": genai.protos.Schema(type=_T.STRING),
    },
    required=["amount"],
)

# name → (description, actions, {entity: (type, description)})
_FUNCTIONS: dict[str, tuple[str, tuple[str, ...], dict[str, tuple]]] = {
    "register_transaction": (
        "Registra um gasto ou uma receita (ou várias de uma vez).",
        ("add_expense", "add_income"),
        {
            "amount": (_T.NUMBER, "Valor em reais: '50,90' → 50.9"),
            "category": (_T.STRING, "Categoria"),
            "description": (_T.STRING, "Descrição curta"),
            "date": (_T.STRING, "YYYY-MM-DD; omita quando não houver data"),
            "payment_method": (_T.STRING, "Forma de pagamento"),
            "transactions": (_T.ARRAY, "Use quando a mensagem registra várias transações"),
        },
    ),
    "manage_transaction": (
        "Edita, apaga, detalha ou desfaz uma transação já registrada.",
        ("edit_transaction", "delete_transaction", "change_category",
         "show_transaction_details", "undo_last", "make_expense_recurring"),
        {
            "transaction_id": (_T.INTEGER, "Número citado como '#12'"),
            "amount": (_T.NUMBER, "Novo valor"),
            "category": (_T.STRING, "Nova categoria"),
            "description": (_T.STRING, "Nova descrição"),
            "date": (_T.STRING, "Nova data YYYY-MM-DD"),
            "day_of_month": (_T.INTEGER, "Dia do mês para tornar recorrente"),
        },
    ),
    "query_finances": (
        "Consultas: gastos do período, lista, busca, resumo rápido, relatório mensal, análise.",
        ("show_expenses", "list_transactions", "search_transactions", "quick_stats",
         "show_report", "analyze_spending"),
        {
            "period": (_T.STRING, "'today', 'week' ou 'month'"),
            "limit": (_T.INTEGER, "Quantidade de transações a listar"),
            "query": (_T.STRING, "Texto de busca"),
            "month": (_T.INTEGER, "Mês do relatório (1-12)"),
            "year": (_T.INTEGER, "Ano do relatório"),
        },
    ),
    "manage_budget": (
        "Define, mostra, lista ou remove orçamentos mensais por categoria.",
        ("set_budget", "show_budget", "list_budgets", "delete_budget"),
        {
            "category": (_T.STRING, "Categoria; omita para o orçamento geral"),
            "amount": (_T.NUMBER, "Limite mensal"),
        },
    ),
    "manage_recurring": (
        "Pagamentos recorrentes mensais (aluguel, assinaturas, salário).",
        ("add_recurring", "show_recurring", "list_recurring", "delete_recurring", "edit_recurring"),
        {
            "payment_id": (_T.INTEGER, "Número do recorrente"),
            "description": (_T.STRING, "Nome do pagamento"),
            "amount": (_T.NUMBER, "Valor"),
            "day_of_month": (_T.INTEGER, "Dia do mês (1-31)"),
            "type": (_T.STRING, "'expense' ou 'income'"),
            "category": (_T.STRING, "Categoria"),
            "payment_method": (_T.STRING, "Forma de pagamento"),
        },
    ),
    "manage_categories": (
        "Lista, cria ou remove categorias.",
        ("list_categories", "add_category", "remove_category"),
        {
            "category": (_T.STRING, "Nome da categoria"),
            "type": (_T.STRING, "'expense' ou 'income'"),
            "icon": (_T.STRING, "Emoji"),
        },
    ),
    "manage_installments": (
        "Compras parceladas: registrar ('em 12x'), ver parcelas futuras, quitar, apagar.",
        ("create_installment", "view_future_commitments", "payoff_installment", "delete_installment"),
        {
            "plan_id": (_T.INTEGER, "Número do parcelamento"),
            "description": (_T.STRING, "O que foi comprado"),
            "amount": (_T.NUMBER, "Valor total da compra"),
            "installment_amount": (_T.NUMBER, "Valor de cada parcela, se só ele for citado"),
            "installments": (_T.INTEGER, "Número de parcelas"),
            "category": (_T.STRING, "Categoria"),
            "payment_method": (_T.STRING, "Cartão usado"),
        },
    ),
    "credit_card": (
        "Fatura do cartão de crédito e modo crédito (fechamento e vencimento).",
        ("view_statement_summary", "switch_credit_mode"),
        {
            "payment_method": (_T.STRING, "Nome do cartão"),
            "enabled": (_T.BOOLEAN, "Liga ou desliga o modo crédito"),
            "closing_day": (_T.INTEGER, "Dia de fechamento da fatura"),
            "due_day": (_T.INTEGER, "Dias entre fechamento e vencimento"),
        },
    ),
    "manage_reminders": (
        "Liga ou desliga lembretes de fatura e de pagamento.",
        ("reminders_opt_out", "reminders_opt_in"),
        {"reminder_type": (_T.STRING, "'statement' ou 'payment'; omita para ambos")},
    ),
    "show_help": (
        "Explica como usar o bot ou um comando.",
        ("help",),
        {"command": (_T.STRING, "Comando sobre o qual o usuário perguntou")},
    ),
}


def _declaration(name: str, description: str, actions: tuple[str, ...],
                 entities: dict[str, tuple]) -> genai.protos.FunctionDeclaration:
    properties = {"action": genai.protos.Schema(type=_T.STRING, format_="enum", enum=list(actions))}
    for entity, (type_, help_text) in entities.items():
        if type_ == _T.ARRAY:
            properties[entity] = genai.protos.Schema(
                type=_T.ARRAY, items=_TRANSACTION_ITEM, description=help_text)
        else:
            properties[entity] = genai.protos.Schema(type=type_, description=help_text)
    return genai.protos.FunctionDeclaration(
        name=name,
        description=description,
        parameters=genai.protos.Schema(type=_T.OBJECT, properties=properties, required=["action"]),
    )


_TOOL = genai.protos.Tool(function_declarations=[
    _declaration(name, description, actions, entities)
    for name, (description, actions, entities) in _FUNCTIONS.items()
])

_model = genai.GenerativeModel(GEMINI_MODEL, tools=[_TOOL])

# ── System prompt for the AI ─────────────────────────────

_SYSTEM_PROMPT = """Você é o assistente financeiro pessoal de um bot de chat brasileiro.
Chame exatamente UMA das funções disponíveis para a mensagem do usuário
(português ou inglês). Se a mensagem não for sobre finanças ou estiver
ambígua, não chame nenhuma função.

Data de hoje: {today}
Categorias do usuário: {categories}
Formas de pagamento do usuário: {payment_methods}

Regras:
- "gastei", "paguei", "comprei" → add_expense; "recebi", "ganhei", "salário" → add_income
- Um valor sem verbo ("50 mercado") é add_expense
- Compras parceladas ("em 10x") → create_installment com amount = valor total
- Datas relativas ("ontem") viram YYYY-MM-DD; sem data, omita
"""


def _build_prompt(context: Optional[dict]) -> str:
    context = context or {}
    return _SYSTEM_PROMPT.format(
        today=date.today().isoformat(),
        categories=", ".join(context.get("categories") or []) or "qualquer",
        payment_methods=", ".join(context.get("payment_methods") or []) or "qualquer",
    )


def _to_plain(value: Any) -> Any:
    """Function call args (proto map/list composites) → plain dicts and lists."""
    if hasattr(value, "items"):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (str, bytes)):
        return value
    if hasattr(value, "__iter__"):
        return [_to_plain(v) for v in value]
    return value


def function_call_to_intent(name: str, args: dict) -> Optional[Intent]:
    """
    Build an Intent from a function the model called.

    Returns None when the function is unknown or its 'action' does not
    belong to it.
    """
    if name not in _FUNCTIONS:
        logger.warning(f"Gemini called unknown function {name!r}")
        return None
    _, actions, _ = _FUNCTIONS[name]

    entities = {k: v for k, v in _to_plain(args or {}).items() if v is not None and v != ""}
    action = entities.pop("action", None) or actions[0]
    if action not in actions:
        logger.warning(f"Gemini called {name} with foreign action {action!r}")
        return None

    for key in _INTEGER_ENTITIES:
        if isinstance(entities.get(key), float) and entities[key].is_integer():
            entities[key] = int(entities[key])
    if action == "add_income":
        entities.setdefault("type", "income")

    return Intent(action=action, confidence=FUNCTION_CALL_CONFIDENCE,
                  entities=entities, strategy="ai_function_calling")


async def parse_with_ai(message: str, context: Optional[dict] = None) -> Optional[Intent]:
    """
    Ask Gemini for the intent behind a message.

    Args:
        message: Raw chat text.
        context: Optional hints: {'categories': [...], 'payment_methods': [...]}.

    Returns:
        An Intent tagged 'ai_function_calling', or None when the model calls
        no function, calls one we cannot use, or the request fails.
    """
    try:
        response = await _model.generate_content_async(
            [
                {"role": "user", "parts": [{"text": _build_prompt(context)}]},
                {"role": "user", "parts": [{"text": message}]},
            ],
            generation_config=genai.GenerationConfig(
                temperature=0.1,
                max_output_tokens=1500,
            ),
            request_options={"timeout": AI_TIMEOUT_SECONDS},
        )
        parts = response.candidates[0].content.parts
    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        return None

    for part in parts:
        call = getattr(part, "function_call", None)
        if call and call.name:
            intent = function_call_to_intent(call.name, call.args)
            if intent is not None:
                logger.info(f"Gemini called {call.name} → {intent.action}")
            return intent

    logger.info("Gemini did not call any function")
    return None


async def embed_text(text: str) -> Optional[list[float]]:
    """Embedding vector for a message, or None if the API call fails."""
    try:
        result = await genai.embed_content_async(
            model=GEMINI_EMBEDDING_MODEL,
            content=text,
            task_type="semantic_similarity",
        )
        return list(result["embedding"])
    except Exception as e:
        logger.error(f"Gemini embedding error: {e}")
        return None
