"""
Source resolver implementation.

Turns a DependencySpec into the ordered list of locations to try. Never
performs network I/O.
"""

import logging
import os
from typing import List, Mapping, Optional

from sdkprov.dependency_models import DependencySpec, RetrievalAttempt
from sdkprov.sdkprov_exceptions import ConfigurationError
from sdkprov.sdkprov_logger import ProvisionLogger


class SourceResolver:
    """
    Resolves retrieval attempts for a dependency.

    An operator-supplied override (an environment variable holding a direct,
    pre-authenticated url) replaces every static candidate. Otherwise the
    static candidates are expanded from their templates in declared order.
    """

    def __init__(
        self,
        logger: ProvisionLogger,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            logger: Logger for resolution messages
            environ: Environment to read overrides from, os.environ by default
        """
        self.logger = logger
        self.environ = environ if environ is not None else os.environ

    def resolve(self, spec: DependencySpec) -> List[RetrievalAttempt]:
        override = self.get_override(spec)
        if override is not None:
            self.logger.log(
                f"Using {spec.override_env} override for {spec.name}",
                logging.INFO,
            )
            return [
                RetrievalAttempt(url=override, source="override", env_var=spec.override_env)
            ]

        values = spec.template_values()
        attempts = []
        for template in spec.candidate_urls:
            try:
                url = template.format(**values)
            except (KeyError, IndexError, ValueError) as e:
                raise ConfigurationError(
                    f"Bad placeholder in url '{template}' for {spec.name}: {e}"
                ) from e
            attempts.append(RetrievalAttempt(url=url, source="static"))

        if not attempts:
            self.logger.log(
                f"No download candidates declared for {spec.name} on {spec.platform}",
                logging.WARNING,
            )
        return attempts

    def get_override(self, spec: DependencySpec) -> Optional[str]:
        if not spec.override_env:
            return None
        value = self.environ.get(spec.override_env, "").strip()
        return value or None
