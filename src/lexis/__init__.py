"""lexis: spaced-repetition scheduling for vocabulary learning."""

from lexis.consts import VERSION

__version__ = VERSION
