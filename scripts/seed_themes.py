"""Sample duel themes, and a command to load them into storage.

Usage: DUEL_STORAGE=file python -m scripts.seed_themes
"""

import logging

from duel.models import Theme, WordEntry

logger = logging.getLogger(__name__)


def get_seed_themes():
    """Spanish vocabulary by theme.

    Returns {theme_id: {name: str, items: {spanish_word: english}}}
    """
    return {
        'es-food': {
            'name': 'Comida',
            'items': {
                'pan': 'bread',
                'leche': 'milk',
                'agua': 'water',
                'carne': 'meat',
                'pollo': 'chicken',
                'arroz': 'rice',
                'huevo': 'egg',
                'queso': 'cheese',
                'manzana': 'apple',
                'naranja': 'orange',
                'ensalada': 'salad',
                'pescado': 'fish'
            }
        },
        'es-body': {
            'name': 'El cuerpo',
            'items': {
                'cabeza': 'head',
                'mano': 'hand',
                'pie': 'foot',
                'brazo': 'arm',
                'pierna': 'leg',
                'dedo': 'finger',
                'corazón': 'heart',
                'espalda': 'back',
                'cuello': 'neck',
                'ojo': 'eye'
            }
        },
        'es-phrases': {
            'name': 'Frases útiles',
            'items': {
                'buenos días': 'good morning',
                'buenas noches': 'good night',
                'por favor': 'please',
                'lo siento': 'i am sorry',
                'de nada': 'you are welcome',
                'hasta luego': 'see you later',
                'mucho gusto': 'nice to meet you',
                'me llamo': 'my name is'
            }
        }
    }


def build_theme(theme_id: str, data: dict, max_wrong: int = 6) -> Theme:
    """Turn a seed entry into a Theme. Distractors are the other answers of the same theme."""
    items = list(data['items'].items())
    answers = [english for _, english in items]
    words = []
    for idx, (spanish, english) in enumerate(items):
        others = answers[idx + 1:] + answers[:idx]
        words.append(WordEntry(spanish, english, [a for a in others if a != english][:max_wrong]))
    return Theme(theme_id, data['name'], words)


def seed(storage) -> list[str]:
    """Save every sample theme. Returns the theme ids."""
    seeded = []
    for theme_id, data in get_seed_themes().items():
        theme = build_theme(theme_id, data)
        theme.validate()
        storage.save_theme(theme)
        seeded.append(theme_id)
        logger.info(f"Seeded theme {theme_id} ({len(theme)} words)")
    return seeded


def main():
    from server.app import create_storage

    logging.basicConfig(level=logging.INFO)
    seeded = seed(create_storage())
    print(f"Seeded {len(seeded)} themes: {', '.join(seeded)}")


if __name__ == '__main__':
    main()
