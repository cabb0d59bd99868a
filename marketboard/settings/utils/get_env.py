import os
import dj_database_url


class EnvHandler:
    """
    Reads settings from the process environment with optional casting.
    """

    def get(self, variable_name, default=None, cast_to=str):
        """
        Return the environment value for `variable_name`, cast with `cast_to`.
        A variable with neither a value nor a default is a configuration error.
        """
        value = os.environ.get(variable_name, default)

        if value is None:
            raise ValueError(
                f"Critical setting '{variable_name}' is not set in the environment!"
            )

        if cast_to == bool:
            return str(value).lower() in ["true", "1", "t", "yes"]

        try:
            return cast_to(value)
        except (ValueError, TypeError):
            raise TypeError(
                f"Could not cast environment variable '{variable_name}' to {cast_to.__name__}."
            )

    def list(self, variable_name, default=None):
        """Comma separated values, e.g. ALLOWED_HOSTS=a.example,b.example"""
        raw = self.get(variable_name, default=default)
        return [part.strip() for part in raw.split(",") if part.strip()]

    def db(self, variable_name="DATABASE_URL", default=None):
        """
        Parse a database URL into a Django DATABASES entry.
        """
        db_url_string = self.get(variable_name, default=default, cast_to=str)

        return dj_database_url.parse(
            db_url_string,
            conn_max_age=600,
            conn_health_checks=True,
        )


env = EnvHandler()
