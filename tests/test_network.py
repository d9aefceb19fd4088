import unittest

import system.network as network
from config.config_store import Catalog, Profile
from system.errors import InterfaceError, ProcessLaunchError

from fakes import FakeRunner, LIST_OUTPUT


class TestListInterfaces(unittest.TestCase):
    def test_parses_services_and_skips_header_and_disabled(self):
        runner = FakeRunner({"networksetup": (0, LIST_OUTPUT)})

        self.assertEqual(network.list_interfaces(runner), ["Wi-Fi", "Ethernet"])
        self.assertEqual(runner.calls, [("networksetup", ["-listallnetworkservices"])])

    def test_trailing_disabled_marker(self):
        runner = FakeRunner({"networksetup": (0, "Ethernet*\nWi-Fi\n\n")})
        self.assertEqual(network.list_interfaces(runner), ["Wi-Fi"])

    def test_non_zero_exit_is_fatal(self):
        runner = FakeRunner({"networksetup": (4, "permission denied")})
        with self.assertRaises(InterfaceError):
            network.list_interfaces(runner)

    def test_missing_tool_is_fatal(self):
        runner = FakeRunner({"networksetup": ProcessLaunchError("networksetup", "not found")})
        with self.assertRaises(ProcessLaunchError):
            network.list_interfaces(runner)


class TestResolveActive(unittest.TestCase):
    def test_known_interface_is_kept(self):
        catalog = Catalog("Ethernet")

        self.assertEqual(network.resolve_active(catalog, ["Wi-Fi", "Ethernet"]), ("Ethernet", False))
        self.assertEqual(catalog.interface, "Ethernet")

    def test_unknown_interface_falls_back_to_first(self):
        catalog = Catalog("VPN")

        active, needs_save = network.resolve_active(catalog, ["Wi-Fi", "Ethernet"])

        self.assertEqual(active, "Wi-Fi")
        self.assertTrue(needs_save)
        self.assertEqual(catalog.interface, "Wi-Fi")

    def test_idempotent(self):
        catalog = Catalog("VPN")
        available = ["Wi-Fi", "Ethernet"]

        first = network.resolve_active(catalog, available)
        second = network.resolve_active(catalog, available)

        self.assertEqual(first[0], second[0])
        self.assertFalse(second[1])

    def test_no_interfaces_is_fatal(self):
        with self.assertRaises(InterfaceError):
            network.resolve_active(Catalog("Wi-Fi"), [])


class TestCurrentServers(unittest.TestCase):
    def test_servers_in_order(self):
        runner = FakeRunner({"networksetup": (0, "8.8.8.8\n\n8.8.4.4\n")})

        self.assertEqual(network.current_servers(runner, "Wi-Fi"), ["8.8.8.8", "8.8.4.4"])
        self.assertEqual(runner.calls, [("networksetup", ["-getdnsservers", "Wi-Fi"])])

    def test_dhcp_defaults_give_empty_list(self):
        runner = FakeRunner({
            "networksetup": (0, "There aren't any DNS Servers set on Wi-Fi.\n"),
        })
        self.assertEqual(network.current_servers(runner, "Wi-Fi"), [])

    def test_failure_is_not_fatal(self):
        runner = FakeRunner({"networksetup": (1, "** Error: unknown service")})

        with self.assertLogs("system.network", level="WARNING"):
            self.assertEqual(network.current_servers(runner, "VPN"), [])


class TestMatchingProfile(unittest.TestCase):
    def setUp(self):
        self.catalog = Catalog("Wi-Fi", [
            Profile("Google", ["8.8.8.8", "8.8.4.4"]),
            Profile("Cloudflare", ["1.1.1.1", "1.0.0.1"]),
            Profile("Cloudflare bis", ["1.1.1.1", "1.0.0.1"]),
        ])

    def test_exact_match(self):
        match = network.matching_profile(self.catalog, ["8.8.8.8", "8.8.4.4"])
        self.assertEqual(match.name, "Google")

    def test_order_matters(self):
        self.assertIsNone(network.matching_profile(self.catalog, ["8.8.4.4", "8.8.8.8"]))

    def test_subset_does_not_match(self):
        self.assertIsNone(network.matching_profile(self.catalog, ["8.8.8.8"]))

    def test_empty_servers(self):
        self.assertIsNone(network.matching_profile(self.catalog, []))

    def test_dhcp_profile_is_not_highlighted(self):
        catalog = Catalog("Wi-Fi", [Profile("DHCP", ["Empty"])])
        runner = FakeRunner({
            "networksetup": (0, "There aren't any DNS Servers set on Wi-Fi.\n"),
        })

        servers = network.current_servers(runner, "Wi-Fi")

        self.assertIsNone(network.matching_profile(catalog, servers))

    def test_first_profile_wins_on_ties(self):
        match = network.matching_profile(self.catalog, ["1.1.1.1", "1.0.0.1"])
        self.assertEqual(match.name, "Cloudflare")


if __name__ == "__main__":
    unittest.main()
