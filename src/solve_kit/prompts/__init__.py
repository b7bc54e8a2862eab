from .prompt import Prompt
from .prompts_library import BUILTIN_PROMPTS_DIR, PromptsLibrary

__all__ = [
    "BUILTIN_PROMPTS_DIR",
    "Prompt",
    "PromptsLibrary",
]
