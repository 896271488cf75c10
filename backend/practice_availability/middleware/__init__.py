"""Request context dependencies"""
