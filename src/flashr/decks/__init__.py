"""Example decks bundled with flashr."""
