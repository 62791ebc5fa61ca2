"""Extension layer — plugin system via pluggy.

Discovery: entry_points (``covctl.plugins`` group) plus single-file
plugins in ``.covctl/plugins/``. Plugins contribute test runners and
observe lifecycle events.
INVARIANT: Plugin failures are warnings, never errors.
"""

from covctl.plugins.event_bus import EventBus
from covctl.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
