"""Configuration, logging and shared constants"""
