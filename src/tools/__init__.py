from tools.analytics import by_day, monthly  # noqa: F401
from tools.budget import validate  # noqa: F401
from tools.categories import with_budget  # noqa: F401
from tools.goals import add_balance, progress  # noqa: F401
from tools.transactions import create, day_summary, delete, update  # noqa: F401
