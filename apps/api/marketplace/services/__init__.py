"""
Services package.

ルートからは Session / BlobStore を渡してサービスを組み立てる
（グローバルな接続を直接触らない）。
"""
