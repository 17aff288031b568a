"""Page extraction - read submissions from problem pages"""
