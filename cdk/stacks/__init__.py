"""CDK stacks for the translation backend."""
from .api_stack import TranslateApiStack
from .base_stack import TranslateBaseStack

__all__ = ["TranslateBaseStack", "TranslateApiStack"]
