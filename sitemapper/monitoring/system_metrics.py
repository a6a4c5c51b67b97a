from dataclasses import dataclass


@dataclass
class SystemMetrics:
    """Host and service process resource usage"""
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    process_rss_mb: float = 0.0
    disk_free_gb: float = 0.0
    browser_processes: int = 0
    open_files: int = 0
