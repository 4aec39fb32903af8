"""Token counting backed by OpenAI's tiktoken library.

The cost engine treats tokenization as an injected capability: it asks for a
cost function once per pass and calls it on every visible file. This module
provides that capability. ``acquire(model)`` loads the encoder for a model and
returns a TokenCounter, which is itself the cost function.

Primary models and their encodings:
- GPT-4o models (gpt-4o, gpt-4o-mini) - o200k_base encoding
- GPT-4 and GPT-3.5-Turbo models - cl100k_base encoding

For other language models, using a similar model's tokenizer can provide useful
approximations of token counts, though they may not exactly match the target
model's tokenization.
"""

import importlib.util
import logging
from typing import Any

from projingest.exceptions import EncoderUnavailable

logger = logging.getLogger(__name__)

INSTALL_HINT = (
    "Token counting requires the tiktoken library. Install it with:\n"
    "    pip install 'projingest[token_counting]'\n"
    "or run without token counts (-N/--no-tokens)."
)


class TokenCounter:
    """Counts tokens in text with the tokenizer of a given model.

    A TokenCounter is immutable once constructed and safe to share between the
    worker threads of a cost pass: encoding does not touch any counter state.

    Attributes:
        model (str): Name of the model whose tokenizer is used.
        encoder (Any): The tiktoken encoder.

    Example:
        >>> counter = TokenCounter("gpt-4o")  # doctest: +SKIP
        >>> counter("Hello, world!")  # doctest: +SKIP
        4

    Raises:
        EncoderUnavailable: If tiktoken is not installed or does not know the model.
    """

    def __init__(self, model: str):
        self.model = model
        if not self._check_tiktoken():
            raise EncoderUnavailable(model, INSTALL_HINT)
        self.encoder: Any = self._get_encoder()

    def _check_tiktoken(self) -> bool:
        """Check if the tiktoken library is available."""
        return importlib.util.find_spec("tiktoken") is not None

    def _get_encoder(self) -> Any:
        """Load the tiktoken encoder for the model.

        Raises:
            EncoderUnavailable: If the model's tokenizer cannot be loaded.
        """
        # Import tiktoken here to avoid import errors when not available
        import tiktoken

        try:
            return tiktoken.encoding_for_model(self.model)
        except KeyError:
            raise EncoderUnavailable(
                self.model,
                f"Could not load tokenizer for model '{self.model}'. Consider using a "
                "well-supported model like 'gpt-4o' (o200k_base encoding) or 'gpt-4' "
                "(cl100k_base encoding). While token counts may not exactly match your "
                "target model, they can provide useful approximations.",
            )
        except Exception as e:
            # Encoding files are downloaded on first use; network failures land here
            raise EncoderUnavailable(self.model, f"Could not load tokenizer for model '{self.model}': {e}") from e

    def __call__(self, text: str) -> int:
        """Return the number of tokens in text.

        Special-token markers such as ``<|endoftext|>`` are encoded as ordinary
        text, since project files may legitimately contain them.
        """
        return len(self.encoder.encode(text, disallowed_special=()))

    def __repr__(self) -> str:
        return f"TokenCounter(model={self.model!r})"


def acquire(model: str) -> TokenCounter:
    """Acquire the cost function for a model.

    Loading an encoder is expensive, so callers acquire once per cost pass and
    share the result between all files of that pass.

    Args:
        model: Model identifier, e.g. "gpt-4o".

    Returns:
        A callable mapping text to its token count.

    Raises:
        EncoderUnavailable: If the encoder cannot be loaded.
    """
    counter = TokenCounter(model)
    logger.debug("Loaded tokenizer for %s", model)
    return counter
