"""Google API integrations - OAuth, Drive, Docs"""
