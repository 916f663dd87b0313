from abc import ABC, abstractmethod
from typing import Optional, Self


class IFixture(ABC):
    @abstractmethod
    def describe(self) -> str:
        pass


class FixtureOne(IFixture):
    def __init__(self, number: int = 1):
        self.number = number

    def describe(self) -> str:
        return f"fixture {self.number}"


class FixtureWithInterface:
    def __init__(self, fixture: IFixture, number: int = 1):
        self.fixture = fixture
        self.number = number

    def method(self, proof: str, fixture: IFixture, times: int = 101) -> list:
        return [proof, fixture, times]

    @staticmethod
    def static_method(proof: str, fixture: IFixture, times: int = 101) -> list:
        return [proof, fixture, times]


class FixtureVariadic:
    def __init__(self, address: Optional[str], *numbers: int):
        self.address = address
        self.numbers = numbers


class Plain:
    pass


class Counter:
    def __init__(self, start: int = 0):
        self.start = start

    def merge(self, other: Self) -> int:
        return self.start + other.start


class Greeter:
    def __call__(self, fixture: IFixture, greeting: str = "Hello") -> str:
        return f"{greeting}, {fixture.describe()}"


class WithNew:
    def __new__(cls, *args, **kwargs):
        return super().__new__(cls)

    def __init__(self, fixture: IFixture, number: int = 2):
        self.fixture = fixture
        self.number = number


class NewOnly:
    def __new__(cls, number: int = 4):
        instance = super().__new__(cls)
        instance.number = number
        return instance
