"""Which creative variables the prompt builder asks about."""

from typing import Dict, List, Union

from ..models.enums import ColorCategory, PromptVariable

VARIABLE_CATALOG: List[PromptVariable] = [
    PromptVariable.TEXTURE,
    PromptVariable.LIGHTING,
    PromptVariable.MOOD,
    PromptVariable.BACKGROUND,
    PromptVariable.STYLE,
]

VARIABLE_COLOR_CATEGORIES: Dict[PromptVariable, ColorCategory] = {
    PromptVariable.SUBJECT: ColorCategory.SUBJECT,
    PromptVariable.SUBJECT_ACTION: ColorCategory.SUBJECT,
    PromptVariable.TEXTURE: ColorCategory.VARIABLE,
    PromptVariable.MATERIAL: ColorCategory.VARIABLE,
    PromptVariable.STYLE: ColorCategory.VARIABLE,
    PromptVariable.LIGHTING: ColorCategory.CONTEXT,
    PromptVariable.BACKGROUND: ColorCategory.CONTEXT,
    PromptVariable.ERA: ColorCategory.CONTEXT,
    PromptVariable.MOOD: ColorCategory.CONTEXT,
    PromptVariable.COLOR_PALETTE: ColorCategory.CONTEXT,
}


def select_variables(count: int = 4) -> List[PromptVariable]:
    """First ``count`` catalog variables, in catalog order."""
    count = max(0, min(count, len(VARIABLE_CATALOG)))
    return VARIABLE_CATALOG[:count]


def get_color_category(variable: Union[PromptVariable, str]) -> ColorCategory:
    """Color category for a variable; unknown variables map to ``variable``."""
    try:
        return VARIABLE_COLOR_CATEGORIES.get(PromptVariable(variable), ColorCategory.VARIABLE)
    except (ValueError, TypeError):
        return ColorCategory.VARIABLE
