from .lambda_invoker import LambdaInvoker
from .processor import LambdaProxyHandler

__all__ = ["LambdaInvoker", "LambdaProxyHandler"]
