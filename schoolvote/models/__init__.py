from schoolvote.models.admin import Admin
from schoolvote.models.candidate import Candidate
from schoolvote.models.vote import Vote
from schoolvote.models.voter import Voter

__all__ = [
    "Admin",
    "Candidate",
    "Vote",
    "Voter",
]
