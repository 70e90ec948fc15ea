# Clicr: Database Models
# Import all models here for SQLAlchemy discovery

from clicr.models.business import Business                     # noqa
from clicr.models.venue import Venue                           # noqa
from clicr.models.area import Area                             # noqa
from clicr.models.device import Device                         # noqa
from clicr.models.profile import Profile                       # noqa
from clicr.models.occupancy_snapshot import OccupancySnapshot  # noqa
from clicr.models.count_event import CountEvent                # noqa
from clicr.models.scan_event import ScanEvent                  # noqa
from clicr.models.capacity_alert import CapacityAlert          # noqa
from clicr.models.staff_ban import StaffBan                    # noqa
from clicr.models.patron import BannedPerson, PatronBan        # noqa
from clicr.models.capacity_override import CapacityOverride    # noqa
from clicr.models.ban_enforcement import BanEnforcementEvent    # noqa
