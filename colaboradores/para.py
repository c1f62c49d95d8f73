# colaboradores/para.py
# Static option lists used by the form and the store adapter.

department_options: dict[str, str] = {
    "desenvolvimento": "Desenvolvimento",
    "design": "Design",
    "marketing": "Marketing",
    "vendas": "Vendas",
    "rh": "Recursos Humanos",
    "financeiro": "Financeiro",
    "operacoes": "Operações",
    "suporte": "Suporte ao Cliente",
    "ti": "TI",
    "produto": "Produto",
}

# Avatar colour tokens, one is picked at creation time
avatar_colors: list[str] = [
    "#FF6B6B",  # coral
    "#4ECDC4",  # teal
    "#45B7D1",  # sky
    "#96CEB4",  # sage
    "#FFEAA7",  # sand
    "#DDA0DD",  # plum
    "#98D8C8",  # mint
    "#F7DC6F",  # mustard
]

DEFAULT_AVATAR_COLOR: str = "#CCCCCC"

status_labels: dict[str, str] = {
    "Active": "Ativo",
    "Inactive": "Inativo",
}
