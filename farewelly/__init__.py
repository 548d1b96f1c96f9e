"""Farewelly funeral coordination API"""
