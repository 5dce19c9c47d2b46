"""Prompt text sent to the generation backend."""

from typing import Sequence

from ndraft.models import Card

SYSTEM_PROMPT = """You are a helpful, casual AI assistant. You can control styling and app behavior.

1. VISUAL STYLING (Start of response):
   - Page Theme: !theme:Name,BgHex,CardBgHex,TextHex,BorderHex,PrimaryHex!
   - Card Style: !bg:#hex! !text:#hex! !border:#hex! !pad:px! !radius:px! !bold! !italic!

2. APP ACTIONS (Hidden commands, put at end):
   - !action:merge! (Merges current selection)
   - !action:clear! (Clears the entire board)
   - !action:view:grid! or !action:view:list! or !action:view:full! (Changes view)

Example 1 (Style + Action):
!theme:Gold,#1a1a1a,#2a2a2a,#ffd700,#ffd700,#b8860b!
Hello World
!action:view:grid!

User requests are natural language. Be efficient."""

LOCKED_STYLE_NOTE = "(Note: Original card has locked styles)"


def build_user_prompt(prompt: str) -> str:
    return f"{SYSTEM_PROMPT}\n\nUser: {prompt}"


def build_continue_instruction(card: Card, instructions: str) -> str:
    return f'CONTINUE: Original: "{card.q}". Current: "{card.r}". Instruct: {instructions}'


def build_continue_prompt(card: Card, instruction: str) -> str:
    """Prompt for refining ``card`` in place."""
    style_context = LOCKED_STYLE_NOTE if card.is_locked else ""
    return (
        f'Previous Request: "{card.q}"\n'
        f'Previous Response: "{card.r}" {style_context}\n\n'
        f"User Instruction: {instruction}\n\n"
        "Provide a continuation or refinement."
    )


def build_split_prompt(card: Card, instructions: str) -> str:
    return f"SPLIT: {instructions}. Text: {card.r}"


def build_edit_prompt(card: Card, instructions: str) -> str:
    return f"EDIT: {instructions}. Current: {card.r}"


def build_merge_prompt(cards: Sequence[Card], instructions: str = "") -> str:
    content = "\n".join(f"---\n{card.q}\n{card.r}" for card in cards)
    if instructions:
        return f"Merge these into one based on: {instructions}\n\n{content}"
    return f"Combine these into one coherent response:\n\n{content}"


def merged_card_title(count: int) -> str:
    return f"Merged {count} cards"


def build_theme_prompt(description: str) -> str:
    return (
        "Generate ONLY a style definition in this exact format:\n"
        "!theme:Name,BgHex,CardBgHex,TextHex,BorderHex,PrimaryHex!\n"
        f"Based on this vibe: {description}\n"
        "Do not output any other text."
    )
