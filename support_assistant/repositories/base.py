import abc


class BaseSecretRepository(abc.ABC):
    @abc.abstractmethod
    def access_secret(self, secret_suffix: str) -> str:
        raise NotImplementedError
