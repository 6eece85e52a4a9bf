"""
Persona Manager for AmIaBot

Handles loading and validation of the YAML file containing bot personas:
the style directives the completion service is primed with so that a bot
sounds like one consistent person for the length of a game.
"""

import yaml
import random
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Persona:
    """Style/prompt profile assigned to a bot for one session."""
    id: str
    name: str
    system_prompt: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'system_prompt': self.system_prompt
        }


class ContentValidationError(Exception):
    """Raised when YAML content validation fails."""
    pass


class PersonaManager:
    """Manages loading and validation of bot personas from YAML files."""

    def __init__(self, yaml_file_path: str = "personas.yaml", rng: Optional[random.Random] = None):
        """
        Initialize PersonaManager with path to YAML file.

        Args:
            yaml_file_path: Path to the YAML file containing personas
            rng: Random source used for persona selection
        """
        self.yaml_file_path = yaml_file_path
        self.personas: List[Persona] = []
        self._rng = rng or random.Random()
        self._loaded = False

    def load_personas_from_yaml(self) -> None:
        """
        Load personas from YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ContentValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)

            self.validate_yaml_structure(data)
            self.personas = self._parse_personas(data)
            self._loaded = True
            logger.info(f"Successfully loaded {len(self.personas)} personas from {self.yaml_file_path}")

        except FileNotFoundError:
            logger.error(f"YAML file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except ContentValidationError as e:
            logger.error(f"Content validation error: {e}")
            raise

    def validate_yaml_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Args:
            data: Parsed YAML data to validate

        Raises:
            ContentValidationError: If structure is invalid
        """
        if not isinstance(data, dict):
            raise ContentValidationError("YAML root must be a dictionary")

        if 'personas' not in data:
            raise ContentValidationError("YAML must contain 'personas' key")

        personas = data['personas']
        if not isinstance(personas, list):
            raise ContentValidationError("'personas' must be a list")

        if len(personas) == 0:
            raise ContentValidationError("'personas' list cannot be empty")

        required_fields = {'id', 'name', 'system_prompt'}

        for i, item in enumerate(personas):
            if not isinstance(item, dict):
                raise ContentValidationError(f"Persona item {i} must be a dictionary")

            missing_fields = required_fields - set(item.keys())
            if missing_fields:
                raise ContentValidationError(
                    f"Persona item {i} missing required fields: {missing_fields}"
                )

            for field in sorted(required_fields):
                if not isinstance(item[field], str):
                    raise ContentValidationError(
                        f"Persona item {i} field '{field}' must be a string"
                    )
                if not item[field].strip():
                    raise ContentValidationError(
                        f"Persona item {i} field '{field}' cannot be empty"
                    )

        ids = [item['id'] for item in personas]
        if len(ids) != len(set(ids)):
            raise ContentValidationError("Duplicate persona IDs found")

    def _parse_personas(self, data: Dict[str, Any]) -> List[Persona]:
        return [
            Persona(
                id=item['id'].strip(),
                name=item['name'].strip(),
                system_prompt=' '.join(item['system_prompt'].split())
            )
            for item in data['personas']
        ]

    def get_random_persona(self) -> Persona:
        """
        Pick one persona uniformly at random.

        Raises:
            RuntimeError: If no personas are loaded
        """
        if not self._loaded or not self.personas:
            raise RuntimeError("No personas loaded. Call load_personas_from_yaml() first.")

        return self._rng.choice(self.personas)

    def get_persona_by_id(self, persona_id: str) -> Optional[Persona]:
        if not self._loaded:
            raise RuntimeError("No personas loaded. Call load_personas_from_yaml() first.")

        for persona in self.personas:
            if persona.id == persona_id:
                return persona

        return None

    def is_loaded(self) -> bool:
        """Check if personas have been loaded."""
        return self._loaded

    def get_persona_count(self) -> int:
        """Get the number of loaded personas."""
        return len(self.personas) if self._loaded else 0


def create_persona_manager(rng: Optional[random.Random] = None, yaml_file_path: str = "personas.yaml") -> PersonaManager:
    """Build a PersonaManager and load its YAML file."""
    manager = PersonaManager(yaml_file_path, rng=rng)
    manager.load_personas_from_yaml()
    return manager
