"""
Outcome Reporter
Turns a DeploymentResult into operator output and an exit status
"""

import sys
from typing import Optional, TextIO
from loguru import logger

from .models import DeploymentResult


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class OutcomeReporter:
    """
    Writes the deployment outcome

    Success goes to stdout as "<Name> deployed to: <address>" so callers can
    capture it. Failures go to stderr. Exit status is returned, not raised.
    """

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def report(self, result: DeploymentResult) -> int:
        if result.ok:
            logger.success(f"✅ {result.contract_name} deployed successfully!")
            if result.tx_hash:
                logger.info(f"Transaction hash: {result.tx_hash}")
            print(f"{result.contract_name} deployed to: {result.address}", file=self.out, flush=True)
            return EXIT_SUCCESS

        logger.error(f"❌ {result.contract_name} deployment failed")
        print(f"{type(result.error).__name__}: {result.error}", file=self.err, flush=True)
        return EXIT_FAILURE

    def report_error(self, error: Exception) -> int:
        """Report a failure that happened before any deployment started"""
        logger.error(f"❌ {error}")
        print(f"{type(error).__name__}: {error}", file=self.err, flush=True)
        return EXIT_FAILURE
