from pathlib import Path
import logging as lg
import tomllib


class Settings:
    debug: bool
    verbose: bool

    def __init__(self):
        self.debug = False
        self.verbose = False

    def update(
        self,
        debug: bool | None = None,
        verbose: bool | None = None
    ):
        if debug is not None:
            self.debug = debug

        if verbose is not None:
            self.verbose = verbose

        return self

    def __repr__(self) -> str:
        return f'Settings(debug={self.debug}, verbose={self.verbose})'


def _flag(config: dict, *keys: str) -> bool | None:
    for key in keys:
        if key not in config:
            continue

        value = config[key]

        if not isinstance(value, bool):
            raise UserWarning(f'Setting {key} must be a boolean, got {value!r}')

        return value

    return None


def load_settings(path: str | Path) -> Settings:
    ''' Reads settings from a TOML file, falling back to defaults '''
    if isinstance(path, str):
        path = Path(path)

    settings = Settings()

    if not path.exists():
        lg.debug(f'No settings file {path}, using defaults')
        return settings

    try:
        config = tomllib.loads(path.read_text(encoding='utf-8'))

        return settings.update(
            debug=_flag(config, 'debug'),
            verbose=_flag(config, 'verbose_debug', 'verbose')
        )

    except (OSError, UnicodeDecodeError) as e:
        lg.warning(f'Reading {path} failed ({e}), using defaults')
        return Settings()

    except (tomllib.TOMLDecodeError, UserWarning) as e:
        lg.warning(f'Parsing {path} failed ({e}), using defaults')
        return Settings()
