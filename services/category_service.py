"""
services/category_service.py
----------------------------
Category listing, creation and removal, plus name resolution for the
other services.
"""

from typing import Optional

from models.errors import NotFoundError
from repositories.category_repo import CategoryRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class CategoryService:
    """Business logic for spending and income categories."""

    def __init__(self):
        self.repo = CategoryRepository()

    def resolve(self, user_id: int, name: Optional[str]) -> Optional[dict]:
        """Category dict for a name, or None when the name is empty or unknown."""
        if not name:
            return None
        return self.repo.find_by_name(user_id, name)

    def require(self, user_id: int, name: str) -> dict:
        """
        Like resolve(), but a missing category is an error.

        Raises:
            NotFoundError: If no category matches.
        """
        category = self.resolve(user_id, name)
        if category is None:
            raise NotFoundError(f"Categoria \"{name}\" não encontrada.")
        return category

    def list_categories(self, user_id: int) -> str:
        categories = self.repo.get_for_user(user_id)
        if not categories:
            return "📭 Nenhuma categoria cadastrada."

        expense = [c for c in categories if c["type"] == "expense"]
        income = [c for c in categories if c["type"] == "income"]

        lines = ["🏷️ *Suas categorias*\n"]
        if expense:
            lines.append("💸 Despesas:")
            lines += [f"  {c['icon'] or '•'} {c['name']}{' (sua)' if c['custom'] else ''}" for c in expense]
        if income:
            lines.append("\n💰 Receitas:")
            lines += [f"  {c['icon'] or '•'} {c['name']}{' (sua)' if c['custom'] else ''}" for c in income]
        return "\n".join(lines)

    def add_category(self, user_id: int, name: Optional[str], category_type: str = "expense",
                     icon: Optional[str] = None) -> str:
        if not name or not name.strip():
            return "⚠️ Informe o nome da categoria. Ex: `/categories add Pets`"
        if self.repo.find_by_name(user_id, name):
            return f"ℹ️ A categoria \"{name.strip()}\" já existe."
        if category_type not in ("expense", "income"):
            category_type = "expense"

        created = self.repo.add(user_id, name, category_type, icon)
        return f"✅ Categoria \"{created['name']}\" criada."

    def remove_category(self, user_id: int, name: Optional[str]) -> str:
        if not name:
            return "⚠️ Qual categoria você quer remover?"
        category = self.repo.find_by_name(user_id, name)
        if category is None:
            return f"⚠️ Categoria \"{name}\" não encontrada."
        if not self.repo.delete(category["id"], user_id):
            return f"⚠️ \"{category['name']}\" é uma categoria padrão e não pode ser removida."
        return f"🗑️ Categoria \"{category['name']}\" removida."
