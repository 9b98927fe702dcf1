"""Implementation modules for :mod:`llmlab.base.cancellation`."""
