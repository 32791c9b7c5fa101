"""Pricing engine and catalog services"""
