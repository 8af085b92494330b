import logging

from ledger.errors import ConfigurationError, NotFoundError
from ledger.models import (
    GameTemplate,
    ROUND_STRUCTURES,
    WIN_CONDITIONS,
    FIXED,
    DYNAMIC,
    HIGHEST_SCORE,
    LOWEST_SCORE,
    encode_round_names,
)

logger = logging.getLogger(__name__)

_LORUM_ROUNDS = ["Piros", "Felső", "Alsó", "Hátul", "Mente", "Lórum"]

DEFAULT_TEMPLATES = [
    {
        'name': 'Scrabble / Generic',
        'min_players': 2,
        'max_players': 8,
        'win_condition': HIGHEST_SCORE,
        'round_structure': DYNAMIC,
        'default_round_names': [],
    },
    {
        'name': 'Lórum',
        'min_players': 4,
        'max_players': 4,
        'win_condition': LOWEST_SCORE,
        'round_structure': FIXED,
        'default_round_names': _LORUM_ROUNDS * 2,
    },
]


def check_template(name, min_players, max_players, win_condition, round_structure, round_names) -> None:
    """Raise ConfigurationError unless the template is self-consistent."""
    if not name or not str(name).strip():
        raise ConfigurationError('Template name is required')
    if not isinstance(min_players, int) or not isinstance(max_players, int):
        raise ConfigurationError(f'{name}: player bounds must be integers')
    if min_players < 1:
        raise ConfigurationError(f'{name}: min_players must be at least 1, got {min_players}')
    if min_players > max_players:
        raise ConfigurationError(f'{name}: min_players ({min_players}) exceeds max_players ({max_players})')
    if win_condition not in WIN_CONDITIONS:
        raise ConfigurationError(f'{name}: unknown win condition {win_condition!r}')
    if round_structure not in ROUND_STRUCTURES:
        raise ConfigurationError(f'{name}: unknown round structure {round_structure!r}')
    if round_structure == FIXED and not round_names:
        raise ConfigurationError(f'{name}: a FIXED template needs at least one round name')


class TemplateCatalog:
    """Read access to the game templates, plus the one-time seed."""

    def __init__(self, session):
        self.session = session

    def list(self):
        templates = self.session.query(GameTemplate).order_by(GameTemplate.id).all()
        for template in templates:
            self._check_row(template)
        return templates

    def get(self, template_id) -> GameTemplate:
        template = self.session.get(GameTemplate, template_id) if template_id is not None else None
        if template is None:
            raise NotFoundError(f'Template {template_id} not found')
        self._check_row(template)
        return template

    def seed(self, definitions):
        """Insert every definition whose name is not in the catalog yet.

        All definitions are checked first; one bad definition means
        nothing is written. Returns the newly inserted templates.
        """
        for d in definitions:
            check_template(
                d.get('name'),
                d.get('min_players'),
                d.get('max_players'),
                d.get('win_condition'),
                d.get('round_structure'),
                d.get('default_round_names') or [],
            )

        existing = {name for (name,) in self.session.query(GameTemplate.name).all()}
        added = []
        try:
            for d in definitions:
                if d['name'] in existing:
                    continue
                template = GameTemplate(
                    name=d['name'],
                    min_players=d['min_players'],
                    max_players=d['max_players'],
                    win_condition=d['win_condition'],
                    round_structure=d['round_structure'],
                    default_round_names=encode_round_names(d.get('default_round_names') or []),
                )
                self.session.add(template)
                existing.add(d['name'])
                added.append(template)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        for template in added:
            logger.info(
                f"[template-seed] id={template.id} name={template.name!r} "
                f"structure={template.round_structure} rounds={len(template.round_names)}"
            )
        return added

    @staticmethod
    def _check_row(template: GameTemplate) -> None:
        check_template(
            template.name,
            template.min_players,
            template.max_players,
            template.win_condition,
            template.round_structure,
            template.round_names,
        )
