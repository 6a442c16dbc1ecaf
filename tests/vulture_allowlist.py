from unifi_cli import cli as _cli
from unifi_cli import cli_port_forwards as _cli_port_forwards
from unifi_cli.models import PortForward
from unifi_cli.unifi_client import UnifiClient

_ = _cli._main
_ = _cli.login

_ = _cli_port_forwards.port_forward_list
_ = _cli_port_forwards.port_forward_show
_ = _cli_port_forwards.port_forward_create
_ = _cli_port_forwards.port_forward_update
_ = _cli_port_forwards.port_forward_delete
_ = _cli_port_forwards.port_forward_enable
_ = _cli_port_forwards.port_forward_disable

# Public library surface not used by the CLI
_ = UnifiClient.get_session
_ = UnifiClient.logout_local

# Dataclass fields that vulture cannot detect
_ = PortForward.site_id
