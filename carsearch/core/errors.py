"""
Error taxonomy for the search pipeline.

Every stage raises one of these internally and the stage's caller recovers
with a deterministic fallback. None of them escape ``VehicleSearchPipeline.search``.
"""


class SearchPipelineError(Exception):
    """Base class for recoverable pipeline failures."""


class LLMError(SearchPipelineError):
    """The language model call failed (network, auth, bad response)."""


class LLMTimeoutError(LLMError):
    """The language model did not answer within the request timeout."""


class ExtractionTimeout(SearchPipelineError):
    """Parameter extraction via the language model timed out."""


class ExtractionParseError(SearchPipelineError):
    """The model's extraction output was not valid JSON or violated the schema."""


class ClassificationError(SearchPipelineError):
    """Intent classification via the language model failed or was unparseable."""


class QueryExecutionError(SearchPipelineError):
    """The inventory store rejected or could not run a tier query."""


class QueryTimeout(SearchPipelineError):
    """A tier query did not finish within the store timeout."""


class ResponseSynthesisError(SearchPipelineError):
    """The model could not produce the response text."""


class SuggestionGenerationError(SearchPipelineError):
    """The model could not produce a valid suggestion set."""


class TranslationError(SearchPipelineError):
    """The batched Spanish translation of suggestions failed."""
