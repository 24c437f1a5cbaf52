# tests/conftest.py
import pytest

from core.models import Character, Monster


class ScriptedRng:
    """
    Stand-in for the `random` module.
    randint pops queued values (falling back to the low bound),
    uniform returns its low bound and choice picks the first element.
    """

    def __init__(self, randints=(), random_value=0.99, choices_value=None):
        self.randints = list(randints)
        self.random_value = random_value
        self.choices_value = choices_value

    def randint(self, a, b):
        if self.randints:
            return self.randints.pop(0)
        return a

    def random(self):
        return self.random_value

    def uniform(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]

    def choices(self, population, weights=None, k=1):
        return [self.choices_value] * k


def make_character(**overrides):
    fields = dict(
        id=1, user_id="1001", name="Link", job="Hunter", current_village="Rudania",
        current_hearts=5, max_hearts=5, current_stamina=5, max_stamina=5,
    )
    fields.update(overrides)
    return Character(**fields)


@pytest.fixture
def character():
    return make_character()


@pytest.fixture
def bokoblin():
    return Monster(name="Bokoblin", tier=1, attack=1, defense=1,
                   locations=("Eldin", "Lanayru"), jobs=("Hunter", "Guard"))


@pytest.fixture
def moblin():
    return Monster(name="Moblin", tier=3, locations=("Eldin",), jobs=("Hunter",))
