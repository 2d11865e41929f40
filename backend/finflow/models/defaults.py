"""Seeded categories and colour palettes."""

from typing import Dict, List, Optional

# Colour palettes for categories created without an explicit colour
CATEGORY_PALETTES: Dict[str, List[str]] = {
    'expense': [
        '#007180', '#4db6ac', '#80cbc4', '#009688',
        '#26a69a', '#00897b', '#b2dfdb', '#e0f2f1',
    ],
    'income': [
        '#078834', '#10b981', '#059669', '#34d399', '#6ee7b7',
    ],
}

# Name of the catch-all category used for transfers
TRANSFER_CATEGORY_NAME = 'Other'

# Seeded for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {'name': 'Food', 'type': 'expense', 'color': '#007180'},
    {'name': 'Transportation', 'type': 'expense', 'color': '#4db6ac'},
    {'name': 'Shopping', 'type': 'expense', 'color': '#80cbc4'},
    {'name': 'Entertainment', 'type': 'expense', 'color': '#009688'},
    {'name': 'Bills', 'type': 'expense', 'color': '#26a69a'},
    {'name': 'Health', 'type': 'expense', 'color': '#00897b'},
    {'name': 'Education', 'type': 'expense', 'color': '#b2dfdb'},
    {'name': TRANSFER_CATEGORY_NAME, 'type': 'expense', 'color': '#e0f2f1'},
    {'name': 'Salary', 'type': 'income', 'color': '#2e7d32'},
    {'name': 'Freelance', 'type': 'income', 'color': '#4caf50'},
    {'name': 'Bonus', 'type': 'income', 'color': '#66bb6a'},
    {'name': 'Investment', 'type': 'income', 'color': '#81c784'},
    {'name': TRANSFER_CATEGORY_NAME, 'type': 'income', 'color': '#a5d6a7'},
]


def palette_color(category_type: str, existing_count: int,
                  palettes: Optional[Dict[str, List[str]]] = None) -> str:
    """Pick the next colour for a new category.

    Cycles through the palette for the category type by the number of
    categories of that type the user already has.

    Args:
        category_type: 'income' or 'expense'
        existing_count: Same-type categories the user already owns
        palettes: Palette mapping (defaults to CATEGORY_PALETTES)

    Returns:
        Hex colour string
    """
    palettes = palettes or CATEGORY_PALETTES
    palette = palettes['expense'] if category_type == 'expense' else palettes['income']
    return palette[existing_count % len(palette)]
