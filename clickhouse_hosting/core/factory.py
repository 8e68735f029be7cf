#clickhouse_hosting\core\factory.py
import secrets
import string

from clickhouse_hosting.domain.models import ParameterResource


class ParameterFactory:
    @staticmethod
    def generate_password(length: int = 22) -> str:
        """Random password with at least one lower, upper and digit character."""
        if length < 3:
            raise ValueError("password length must be at least 3")

        alphabet = string.ascii_letters + string.digits
        chars = [
            secrets.choice(string.ascii_lowercase),
            secrets.choice(string.ascii_uppercase),
            secrets.choice(string.digits),
        ]
        chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]

        secrets.SystemRandom().shuffle(chars)
        return "".join(chars)

    @staticmethod
    def create_default_password(name: str, length: int = 22) -> ParameterResource:
        return ParameterResource(
            name=name,
            secret=True,
            default=lambda: ParameterFactory.generate_password(length),
        )
