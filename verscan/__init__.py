"""
verscan - 원격 호스트 소프트웨어 버전 컴플라이언스 감사
"""

__version__ = "1.0.0"
