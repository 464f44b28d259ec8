from .registry import compute_metrics, get_metric, list_metrics, mae, r2, register_metric, rmse

__all__ = ["compute_metrics", "get_metric", "list_metrics", "mae", "r2", "register_metric", "rmse"]
