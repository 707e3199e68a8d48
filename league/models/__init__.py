# Import all models here to ensure they are registered with Base
from .user import User
from .tournament import Tournament
from .round import Round
from .team import Team
from .participant import Participant
from .match import Match, MatchGame
