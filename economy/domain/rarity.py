"""Rarity classification of catalog characters.

Rules are evaluated in order and the first match wins, so the name rule
outranks the status rules: a dead "Morty" is legendary, not rare.
"""

from economy.models.dc_models import CharacterModel, RarityModel

LEGENDARY_NAME_KEYWORDS = ("rick", "morty")


def classify(character: CharacterModel) -> RarityModel:
    """Map a catalog character to its rarity tier.

    Args:
        character (CharacterModel): Character record from the catalog

    Returns:
        RarityModel: common, rare, epic or legendary
    """
    name = character.name.lower()
    if any(keyword in name for keyword in LEGENDARY_NAME_KEYWORDS):
        return RarityModel.legendary
    if character.status == "unknown":
        return RarityModel.epic
    if character.status == "Dead":
        return RarityModel.rare
    return RarityModel.common
