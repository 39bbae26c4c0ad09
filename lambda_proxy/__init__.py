"""
Lambda Proxy: serve HTTP by invoking an AWS Lambda function with
Application Load Balancer target group events.
"""

__version__ = "1.0.0"
