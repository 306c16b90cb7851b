# Propnet drives propagator networks to a fixed point.
# Copyright (C) 2024 Josua Krause
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""A configuration connects the logger and the scheduler with its modules."""
from typing import TypeVar

from propnet.system.base import L_EITHER, Locality, Module
from propnet.system.logger.log import EventStream
from propnet.system.netdef import json_to_network, NetworkDefJSON
from propnet.system.network import Network
from propnet.system.scheduler.scheduler import RunResult, Scheduler


ModuleT = TypeVar('ModuleT', bound=Module)
"""A module."""


class Config:
    """Configurations connect different modules together and ensure their
    compatibility. This class also serves as external API."""
    def __init__(self) -> None:
        """
        Create an empty configuration.
        """
        self._locality: Locality = L_EITHER
        self._logger: EventStream | None = None
        self._scheduler: Scheduler | None = None

    def set_logger(self, logger: EventStream) -> None:
        """
        Set the logger.

        Args:
            logger (EventStream): The logger.

        Raises:
            ValueError: If the logger is already set.
        """
        if self._logger is not None:
            raise ValueError("logger already initialized")
        self._logger = logger

    def get_logger(self) -> EventStream:
        """
        Get the logger.

        Raises:
            ValueError: If no logger is set.

        Returns:
            EventStream: The logger.
        """
        if self._logger is None:
            raise ValueError("logger not initialized")
        return self._logger

    def _update_locality(self, module: ModuleT) -> ModuleT:
        locality = module.locality()
        if self._locality == L_EITHER:
            self._locality = locality
        elif locality == L_EITHER:
            pass
        elif self._locality != locality:
            raise ValueError("trying to load both local and remote modules")
        return module

    def get_locality(self) -> Locality:
        """
        The combined locality of all loaded modules.

        Returns:
            Locality: The locality.
        """
        return self._locality

    def set_scheduler(self, scheduler: Scheduler) -> None:
        """
        Set the scheduler. The scheduler reports to the logger of the
        configuration.

        Args:
            scheduler (Scheduler): The scheduler.

        Raises:
            ValueError: If the scheduler is already set or its modules mix
                local and remote modules.
        """
        if self._scheduler is not None:
            raise ValueError("scheduler already initialized")
        for module in scheduler.get_modules():
            self._update_locality(module)
        scheduler.set_logger(self.get_logger())
        self._scheduler = scheduler

    def get_scheduler(self) -> Scheduler:
        """
        Get the scheduler.

        Raises:
            ValueError: If no scheduler is set.

        Returns:
            Scheduler: The scheduler.
        """
        if self._scheduler is None:
            raise ValueError("scheduler not initialized")
        return self._scheduler

    def load_network(self, network_def: NetworkDefJSON) -> Network:
        """
        Creates a network from its JSON definition. Cells can only be written
        once so every run needs a freshly loaded network.

        Args:
            network_def (NetworkDefJSON): The network definition.

        Returns:
            Network: The network with its initial assignment applied.
        """
        return json_to_network(network_def)

    def run(self, network: Network) -> RunResult:
        """
        Runs a network with the configured scheduler.

        Args:
            network (Network): The network.

        Returns:
            RunResult: The result of the run.
        """
        return self.get_scheduler().run(network)
