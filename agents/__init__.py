"""PydanticAI agents for the Sniffer AI-content detector.

ClassifierAgent:
    Sends content to a chat model (Zhipu GLM by default) with a prompt
    asking for a four-dimension AI-content profile and a 0-100 score.
    Returns the raw completion for the normalizer to parse.

Example:
    >>> from agents import ClassifierAgent
    >>> classifier = ClassifierAgent(config)
    >>> completion = await classifier.complete(text)
"""

from agents.classifier import ClassifierAgent

__all__ = [
    "ClassifierAgent",
]
