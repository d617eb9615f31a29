import os

from listening_ports.cli import get_args

COMMAND_TIMEOUT_DEFAULT = 10
COMMAND_TIMEOUT_MIN = 1
COMMAND_TIMEOUT_MAX = 60


def config_dir():
  return os.environ.get('CONFIG_DIR', '/etc/listening_ports')

def env_file():
  return os.path.join(config_dir(), '.env')

def provider_name():
  return os.environ.get('PORTS_PROVIDER', 'ss')

def ss_command():
  return os.environ.get('SS_COMMAND', 'ss')

def command_timeout():
  try:
    value = int(os.environ.get('SS_TIMEOUT', COMMAND_TIMEOUT_DEFAULT))
  except (TypeError, ValueError):
    return COMMAND_TIMEOUT_DEFAULT
  return max(COMMAND_TIMEOUT_MIN, min(COMMAND_TIMEOUT_MAX, value))

def verbose():
  # Check environment variable first
  if os.environ.get('DEBUG') == 'true':
    return True
  # Check parsed args
  args = get_args()
  return args is not None and args.debug

def log_level():
  if verbose():
    return 'debug'
  else:
    return os.environ.get('LOG_LEVEL', 'info')
