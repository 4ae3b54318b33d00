import os

from dotenv import load_dotenv


class Config:
    def __init__(self, env_file=None):
        """
        Initialize configuration by loading environment variables and setting default attributes.

        Loads environment variables from the provided .env file path when `env_file` is given; otherwise loads from the default environment. After loading, sets the store location, feed fetching and catalog search settings using environment values with sensible defaults.
        Parameters:
            env_file (str | None): Optional path to a .env file to load environment variables from. If omitted, the default environment or default .env discovery is used.

        Raises:
            ValueError: If a numeric setting is not a positive number.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Store location (a single embedded database file)
        self.DATABASE_PATH = os.path.expanduser(
            os.getenv("CMDFEED_DATABASE_PATH", "~/.cmdfeeddb")
        )
        self.DB_ECHO = os.getenv("CMDFEED_DB_ECHO", "false").lower() == "true"

        # Feed fetching
        self.FEED_USER_AGENT = os.getenv("FEED_USER_AGENT", "cmdfeed/0.1 (+https://github.com/cmdfeed)")
        self.FEED_TIMEOUT = self._positive_float("FEED_TIMEOUT", "30")

        # Catalog search
        self.SEARCH_TIMEOUT = self._positive_float("SEARCH_TIMEOUT", "10")
        self.SEARCH_COUNTRY = os.getenv("SEARCH_COUNTRY", "US")

    @staticmethod
    def _positive_float(name, default):
        raw = os.getenv(name, default)
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"{name} must be a number, got: {raw}")
        if value <= 0:
            raise ValueError(f"{name} must be greater than 0, got {value}")
        return value
