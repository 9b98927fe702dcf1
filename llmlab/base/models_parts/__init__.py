"""One-class-per-file implementations behind :mod:`llmlab.base.models`."""
