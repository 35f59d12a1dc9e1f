#!/usr/bin/env python3
"""
Validation script for URL Shortener service.
Exercises a live running instance to ensure the HTTP contract holds.
"""

import argparse
import sys
import time
from typing import Optional
from datetime import datetime

import requests


class ServiceValidator:
    """Validates URL shortener service functionality."""

    def __init__(self, base_url: str = "http://localhost:8080"):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.test_results = []

    def print_header(self, text: str):
        """Print a formatted header."""
        print(f"\n{'='*60}")
        print(f"  {text}")
        print(f"{'='*60}\n")

    def print_test(self, name: str, passed: bool, details: str = ""):
        """Print test result."""
        status = "PASS" if passed else "FAIL"
        self.test_results.append((name, passed))
        print(f"{status} - {name}")
        if details:
            print(f"       {details}")

    def test_health_check(self) -> bool:
        """Test health check endpoint."""
        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=5)
        except requests.RequestException as e:
            self.print_test("Health Check", False, f"Error: {e}")
            return False

        if response.status_code != 200:
            self.print_test("Health Check", False, f"Status: {response.status_code}")
            return False

        data = response.json()
        is_healthy = data.get("status") == "healthy"
        self.print_test("Health Check", is_healthy, f"DB: {data.get('database')}, Cache: {data.get('cache')}")
        return is_healthy

    def test_create_short_url(self, target_url: str) -> Optional[str]:
        """Test creating a short URL. Returns the short URL."""
        try:
            response = self.session.get(f"{self.base_url}/new/{target_url}", timeout=5)
        except requests.RequestException as e:
            self.print_test("Create Short URL", False, f"Error: {e}")
            return None

        if response.status_code == 201:
            data = response.json()
            short_url = data.get("short_url")
            passed = bool(short_url) and data.get("original_url") == target_url
            self.print_test("Create Short URL", passed, f"Short URL: {short_url}")
            return short_url if passed else None

        self.print_test("Create Short URL", False, f"Status: {response.status_code}")
        return None

    def test_redirect(self, slug: str, target_url: str) -> bool:
        """Test that the slug redirects to the original URL."""
        try:
            response = self.session.get(f"{self.base_url}/{slug}", allow_redirects=False, timeout=5)
        except requests.RequestException as e:
            self.print_test("URL Redirect", False, f"Error: {e}")
            return False

        location = response.headers.get("Location", "")
        passed = response.status_code == 302 and location == target_url
        self.print_test("URL Redirect", passed, f"Status: {response.status_code}, Location: {location}")
        return passed

    def test_invalid_url(self) -> bool:
        """Test invalid URL rejection."""
        try:
            response = self.session.get(f"{self.base_url}/new/http://localhost", timeout=5)
        except requests.RequestException as e:
            self.print_test("Invalid URL Rejection", False, f"Error: {e}")
            return False

        passed = (
            response.status_code == 400
            and response.json().get("error") == "Invalid URL Format"
        )
        self.print_test("Invalid URL Rejection", passed, f"Status: {response.status_code} (expected 400)")
        return passed

    def test_nonexistent_slug(self) -> bool:
        """Test requesting a slug that was never allocated."""
        try:
            response = self.session.get(f"{self.base_url}/-missing-", allow_redirects=False, timeout=5)
        except requests.RequestException as e:
            self.print_test("Non-existent Slug", False, f"Error: {e}")
            return False

        passed = response.status_code == 404 and "error" in response.json()
        self.print_test("Non-existent Slug", passed, f"Status: {response.status_code} (expected 404)")
        return passed

    def test_index_page(self) -> bool:
        """Test instructions page."""
        try:
            response = self.session.get(f"{self.base_url}/", timeout=5)
        except requests.RequestException as e:
            self.print_test("Index Page", False, f"Error: {e}")
            return False

        content_type = response.headers.get("content-type", "")
        passed = response.status_code == 200 and "text/html" in content_type
        self.print_test("Index Page", passed, f"Content-Type: {content_type or 'N/A'}")
        return passed

    def run_all_tests(self) -> bool:
        """Run all validation tests."""
        self.print_header("URL Shortener Service Validation")
        print(f"Testing service at: {self.base_url}")
        print(f"Timestamp: {datetime.now().isoformat()}\n")

        if not self.test_health_check():
            print("\nHealth check failed. Service may not be running.")
            print(f"   Make sure the service is accessible at {self.base_url}")
            return False

        print()

        target_url = f"https://example.com/validate/{int(time.time())}"
        short_url = self.test_create_short_url(target_url)
        if short_url:
            self.test_redirect(short_url.rsplit("/", 1)[-1], target_url)

        print()

        self.test_invalid_url()
        self.test_nonexistent_slug()
        self.test_index_page()

        self.print_summary()

        return all(passed for _, passed in self.test_results)

    def print_summary(self):
        """Print test summary."""
        total = len(self.test_results)
        passed = sum(1 for _, p in self.test_results if p)
        failed = total - passed

        self.print_header("Test Summary")
        print(f"Total Tests:  {total}")
        print(f"Passed:       {passed}")
        print(f"Failed:       {failed}")
        print(f"Success Rate: {(passed/total*100):.1f}%")

        if failed > 0:
            print("\nFailed tests:")
            for name, ok in self.test_results:
                if not ok:
                    print(f"   - {name}")

        print()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Validate URL Shortener service functionality"
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8080",
        help="Base URL of the service (default: http://localhost:8080)"
    )

    args = parser.parse_args()

    validator = ServiceValidator(args.url)

    try:
        success = validator.run_all_tests()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nValidation interrupted by user")
        sys.exit(2)


if __name__ == "__main__":
    main()
