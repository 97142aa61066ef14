from abc import ABC, abstractmethod


class IdentityStorePort(ABC):
    @abstractmethod
    def read(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def write(self, identity: str) -> None:
        raise NotImplementedError


class IdentityProviderPort(ABC):
    @abstractmethod
    def get_identity(self) -> str:
        """Return the device identity token used as a throttling correlation header."""
        raise NotImplementedError
