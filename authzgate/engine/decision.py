"""
Decision mapping: final verdict to outcome.
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..core.types import Outcome, RequestContext, Verdict


logger = logging.getLogger(__name__)


class ChallengeIssuer(ABC):
    """Asks the client to (re)authenticate after a denial."""

    @abstractmethod
    def issue(self, context: RequestContext) -> None:
        pass


class BasicChallengeIssuer(ChallengeIssuer):
    """Adds a Basic ``WWW-Authenticate`` header to the response."""

    def __init__(self, realm: str = "Restricted"):
        self.realm = realm

    def issue(self, context: RequestContext) -> None:
        realm = self.realm.replace("\\", "\\\\").replace('"', '\\"')
        context.response_headers["WWW-Authenticate"] = f'Basic realm="{realm}"'


class DecisionMapper:
    """
    Translate a Verdict into the Outcome the hosting pipeline acts on.

    GRANTED continues the request, DENIED challenges and denies it, ERROR is
    a server error. Only DENIED has a side effect: the challenge is issued.
    Provider failures were already logged by whoever detected them, so ERROR
    is not logged again here.
    """

    def __init__(self, challenge_issuer: Optional[ChallengeIssuer] = None):
        self.challenge_issuer = challenge_issuer or BasicChallengeIssuer()

    def map(self, verdict: Verdict, context: RequestContext) -> Outcome:
        if verdict == Verdict.GRANTED:
            return Outcome.CONTINUE

        if verdict == Verdict.DENIED:
            logger.error(
                f"user {context.user}: authorization failure for \"{context.uri}\"",
                extra={"request_id": context.request_id},
            )
            self.challenge_issuer.issue(context)
            return Outcome.CHALLENGE_AND_DENY

        return Outcome.SERVER_ERROR
